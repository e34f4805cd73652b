import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from lettertrust.config import get_settings
from lettertrust.models.risk import ApprovalRecommendation, HallucinationRisk
from lettertrust.phi.scrubber import scrub_object_phi

logger = logging.getLogger("lettertrust.integration")


def trigger_blocked_letter_alert(
    letter_id: str,
    risk: HallucinationRisk,
    recommendation: ApprovalRecommendation,
    webhook_url: Optional[str] = None,
) -> bool:
    """
    Notify the clinical governance channel that a draft was held back.

    Returns True when the webhook accepted the alert. Delivery problems are
    logged and never raised: a failed alert must not block the review.
    """
    webhook_url = webhook_url or get_settings().alert_webhook_url

    if not webhook_url:
        logger.warning("Alert triggered but LETTERTRUST_ALERT_WEBHOOK_URL is not set.")
        return False

    # Counts and scores only; letter text never goes out in an alert
    payload = scrub_object_phi({
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "alert_level": "BLOCKED_LETTER",
        "letter_id": letter_id,
        "engine": get_settings().engine_version,
        "risk_level": risk.level.value,
        "risk_score": risk.score,
        "critical_count": risk.critical_count,
        "warning_count": risk.warning_count,
        "reason": recommendation.reason,
        "action_required": recommendation.action_required,
    })

    try:
        response = requests.post(
            webhook_url,
            json=payload,
            timeout=2.0,
            headers={"Content-Type": "application/json"},
        )
        response.raise_for_status()
        logger.info(f"Blocked letter alert sent. Status: {response.status_code}")
        return True

    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send blocked letter alert: {type(e).__name__}")
        return False
