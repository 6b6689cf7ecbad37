from enum import Enum

# ---- Core Enums ----

class Environment(str, Enum):
    """Valid deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"

# ---- Trade Enums ----

class Segment(str, Enum):
    """Market segment a trade was executed in."""
    EQUITY = "equity"
    FUTURES = "futures"
    OPTIONS = "options"
    COMMODITY = "commodity"

class TradeType(str, Enum):
    """Holding style of a trade."""
    INTRADAY = "intraday"
    POSITIONAL = "positional"
    SWING = "swing"

class PositionSide(str, Enum):
    """Position direction."""
    LONG = "long"
    SHORT = "short"

class TradeStatus(str, Enum):
    """Trade lifecycle states."""
    OPEN = "open"
    CLOSED = "closed"
    PARTIAL = "partial"
    CANCELLED = "cancelled"

# ---- Analytics Enums ----

class PeriodType(str, Enum):
    """Scope kinds an analytics snapshot can be keyed by."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    SYMBOL = "symbol"

class ReportType(str, Enum):
    """Period label attached to a generated report."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

class ExportFormat(str, Enum):
    """Supported report export formats."""
    CSV = "csv"
    EXCEL = "excel"

# ---- Error Enums ----

class ErrorLevel(str, Enum):
    """Error severity levels for logging and handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class ErrorCategory(str, Enum):
    """Error categories for classification and routing."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    STORAGE = "storage"
    SYSTEM = "system"

# ---- Logging Enums ----

class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
