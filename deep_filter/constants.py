# =============================================================================
# deep-filter -- Constants
# =============================================================================
#
# Wire-level names (operators, option keys) are part of the expression
# format and must not change.
# =============================================================================

# -- Defaults ------------------------------------------------------------------

DEFAULT_CASE_SENSITIVE = False
DEFAULT_MAX_DEPTH = 3
DEFAULT_ENABLE_CACHE = False

MIN_MAX_DEPTH = 1
MAX_MAX_DEPTH = 10

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_FIRST_COUNT = 1

# -- Pattern characters --------------------------------------------------------

WILDCARD_ANY = "%"
WILDCARD_ONE = "_"
WILDCARD_CHARS = frozenset((WILDCARD_ANY, WILDCARD_ONE))
NEGATION_PREFIX = "!"
ANY_PROPERTY_KEY = "$"
OPERATOR_PREFIX = "$"
PATH_SEPARATOR = "."

# -- Operators -----------------------------------------------------------------

COMPARISON_OPERATORS = frozenset(("$gt", "$gte", "$lt", "$lte", "$eq", "$ne"))
ARRAY_OPERATORS = frozenset(("$in", "$nin", "$contains", "$size"))
STRING_OPERATORS = frozenset(("$startsWith", "$endsWith", "$contains", "$regex", "$match"))
LOGICAL_OPERATORS = frozenset(("$and", "$or", "$not"))
GEOSPATIAL_OPERATORS = frozenset(("$near", "$geoBox", "$geoPolygon"))
DATETIME_OPERATORS = frozenset((
    "$recent",
    "$upcoming",
    "$dayOfWeek",
    "$timeOfDay",
    "$age",
    "$isWeekday",
    "$isWeekend",
    "$isBefore",
    "$isAfter",
))

FIELD_OPERATORS = (
    COMPARISON_OPERATORS
    | ARRAY_OPERATORS
    | STRING_OPERATORS
    | GEOSPATIAL_OPERATORS
    | DATETIME_OPERATORS
)

# -- Geospatial ----------------------------------------------------------------

EARTH_RADIUS_METERS = 6_371_000.0
MIN_POLYGON_POINTS = 3

# -- Datetime ------------------------------------------------------------------

DAYS_PER_YEAR = 365.25
DAYS_PER_MONTH = 30.44
AGE_UNITS = ("years", "months", "days")
RELATIVE_TIME_UNITS = ("days", "hours", "minutes")

# -- Option names --------------------------------------------------------------

# camelCase option name -> FilterConfig attribute
OPTION_ALIASES = {
    "caseSensitive": "case_sensitive",
    "maxDepth": "max_depth",
    "customComparator": "custom_comparator",
    "enableCache": "enable_cache",
    "debug": "debug",
    "verbose": "verbose",
    "showTimings": "show_timings",
    "colorize": "colorize",
    "orderBy": "order_by",
    "limit": "limit",
    "enablePerformanceMonitoring": "enable_performance_monitoring",
}

# -- Performance monitor -------------------------------------------------------

PERFORMANCE_SAMPLE_WINDOW = 1_000

# -- Debug rendering -----------------------------------------------------------

TREE_BRANCH = "├── "
TREE_LAST = "└── "
TREE_PIPE = "│   "
TREE_SPACE = "    "

DEBUG_TITLE = "Filter Debug Tree"

OPERATOR_LABELS = {
    "$gt": ">",
    "$gte": ">=",
    "$lt": "<",
    "$lte": "<=",
    "$eq": "=",
    "$ne": "!=",
    "$in": "IN",
    "$nin": "NOT IN",
    "$contains": "CONTAINS",
    "$size": "SIZE",
    "$startsWith": "STARTS WITH",
    "$endsWith": "ENDS WITH",
    "$regex": "REGEX",
    "$match": "MATCH",
    "$and": "AND",
    "$or": "OR",
    "$not": "NOT",
    "$near": "NEAR",
    "$geoBox": "IN BOX",
    "$geoPolygon": "IN POLYGON",
    "$recent": "RECENT",
    "$upcoming": "UPCOMING",
    "$dayOfWeek": "DAY OF WEEK",
    "$timeOfDay": "TIME OF DAY",
    "$age": "AGE",
    "$isWeekday": "IS WEEKDAY",
    "$isWeekend": "IS WEEKEND",
    "$isBefore": "BEFORE",
    "$isAfter": "AFTER",
}

ANSI_RESET = "\x1b[0m"
ANSI_BOLD = "\x1b[1m"
ANSI_DIM = "\x1b[2m"
ANSI_GREEN = "\x1b[32m"
ANSI_YELLOW = "\x1b[33m"
ANSI_BLUE = "\x1b[34m"
ANSI_MAGENTA = "\x1b[35m"
ANSI_CYAN = "\x1b[36m"
ANSI_GRAY = "\x1b[90m"
