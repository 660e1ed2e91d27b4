from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from graphmerge.config.settings import (
    GraphMergeConfig,
    HistoryConfig,
    TrackingConfig,
)

settings = Dynaconf(
    envvar_prefix="GRAPHMERGE",
    load_dotenv=True,
    settings_files=[],
)
for _key, _value in DEFAULTS.items():
    settings.setdefault(_key, _value)


def _optional_int(value):
    if value is None or value == "":
        return None
    if isinstance(value, str) and value.lower() in ("none", "off"):
        return None
    return int(value)


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "graphmerge-backend")
    api_prefix: str = settings.get("API_PREFIX", "")

    # ---------------- Graphmerge Policy ----------------
    graphmerge: GraphMergeConfig = GraphMergeConfig(
        history=HistoryConfig(
            max_history=int(settings.get("MAX_HISTORY", 10)),
            max_approval_history=int(settings.get("MAX_APPROVAL_HISTORY", 20)),
        ),
        tracking=TrackingConfig(
            descriptor_warning_threshold=_optional_int(
                settings.get("DESCRIPTOR_WARNING_THRESHOLD", 512)
            ),
        ),
        default_graph_type=settings.get("DEFAULT_GRAPH_TYPE", "DG"),
    )
