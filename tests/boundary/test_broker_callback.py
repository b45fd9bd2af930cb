"""
Test suite for broker callback payload decoding.

System role: Verification of the failure-callback contract
"""

import base64
import json

from thesis_review.models.broker import BrokerCallback

JOB = {"job_id": "abc", "owner_id": "o", "tier": "basic", "step": 2, "total_steps": 3}


class TestBrokerCallback:
    """Test suite for BrokerCallback.original_payload."""

    def test_base64_source_body(self) -> None:
        callback = BrokerCallback.model_validate(
            {
                "sourceMessageId": "msg_1",
                "status": 500,
                "sourceBody": base64.b64encode(json.dumps(JOB).encode()).decode(),
            }
        )

        assert callback.message_id == "msg_1"
        assert callback.original_payload() == JOB

    def test_raw_json_body(self) -> None:
        callback = BrokerCallback.model_validate({"body": json.dumps(JOB)})

        assert callback.original_payload() == JOB

    def test_unreadable_body(self) -> None:
        callback = BrokerCallback.model_validate({"sourceBody": "%%%not-base64%%%"})

        assert callback.original_payload() is None

    def test_missing_body(self) -> None:
        assert BrokerCallback.model_validate({"messageId": "m"}).original_payload() is None
