# Risk level thresholds on the 0-100 hallucination score.
# Kept apart from the scoring logic so they can be tuned without touching it.

MAX_RISK_SCORE = 100

MEDIUM_RISK_MIN = 1
HIGH_RISK_MIN = 40
CRITICAL_RISK_MIN = 60

# Interpretation:
# 0       -> LOW
# 1 - 39  -> MEDIUM
# 40 - 59 -> HIGH
# 60+     -> CRITICAL   (two unresolved critical flags land here)

# Approval gate
MIN_VERIFICATION_RATE = 0.8
HIGH_RISK_WARNING_SCORE = 70
