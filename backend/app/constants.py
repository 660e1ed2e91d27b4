DEFAULTS = {
    # Service name shown in the OpenAPI docs
    "APP_NAME": "graphmerge-backend",
    # Prefix prepended to every router
    "API_PREFIX": "",
    # Undo stack depth per panel
    "MAX_HISTORY": 10,
    # Approval log length per panel
    "MAX_APPROVAL_HISTORY": 20,
    # Log a warning when one node carries more path descriptors than this
    "DESCRIPTOR_WARNING_THRESHOLD": 512,
    # Graph type used when a request does not name one
    "DEFAULT_GRAPH_TYPE": "DG",
}
