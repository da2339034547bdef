"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from types import MappingProxyType

from .enums import CycleType, PeriodType, RangeType, SpecialHourType

DEFAULT_RANGE_MULTIPLIERS = MappingProxyType(
    {
        RangeType.NORMAL: 1.0,
        RangeType.OVERTIME: 1.25,
        RangeType.NIGHT_SHIFT: 1.5,
        RangeType.SUNDAY: 2.0,
        RangeType.HOLIDAY: 2.0,
        RangeType.SPECIAL: 1.5,
    }
)

DEFAULT_PERIOD_MULTIPLIERS = MappingProxyType(
    {
        PeriodType.REGULAR: 1.0,
        PeriodType.BREAK: 1.0,
        PeriodType.OVERTIME: 1.25,
        PeriodType.SPECIAL: 1.5,
    }
)

DEFAULT_SPECIAL_HOUR_MULTIPLIERS = MappingProxyType(
    {
        SpecialHourType.HOLIDAY: 2.0,
        SpecialHourType.NIGHT_SHIFT: 1.5,
        SpecialHourType.WEEKEND: 1.5,
        SpecialHourType.ON_CALL: 1.25,
    }
)

DEFAULT_CYCLE_DAYS = MappingProxyType({CycleType.WEEKLY: 7, CycleType.BIWEEKLY: 14, CycleType.MONTHLY: 30})

MINUTES_PER_DAY = 24 * 60

DEFAULT_MAX_DAILY_HOURS = 12.0
DEFAULT_SCHEDULE_TOLERANCE_MINUTES = 15
DEFAULT_OPEN_ENTRY_GRACE_HOURS = 16
DEFAULT_DASHBOARD_TOP_N = 5
DEFAULT_TREND_MONTHS = 6

EFFICIENCY_FLOOR = 0.0
EFFICIENCY_CEILING = 150.0

HOURS_TOLERANCE = 0.01

MOST_COMMON_ISSUES_LIMIT = 5
