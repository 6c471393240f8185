"""Internal constants shared across the library."""

ACTION_PREFIX = "@@pyrtdb"
STORE_AS_SEPARATOR = "@"
QUERY_SEPARATOR = "#"
QUERY_PARAM_SEPARATOR = "&"
PATH_SEPARATOR = "/"
