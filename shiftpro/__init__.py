"""ShiftPro 스케줄링 코어 패키지.

ShiftPro scheduling core: pattern expansion and hours/pay aggregation.
"""

__version__: str = "1.0.0"
