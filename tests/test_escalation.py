# tests/test_escalation.py
from app.services.escalation_service import should_escalate
from app.services.sentiment_service import analyze_sentiment


NEUTRAL = {"score": 0.0, "comparative": 0.0, "label": "neutral", "magnitude": "low"}


def test_no_signal_does_not_escalate():
    assert not should_escalate("Here is how to check your balance.", "what is my balance", NEUTRAL)


def test_user_asks_for_manager():
    assert should_escalate("Sure.", "I need to speak to a MANAGER now", NEUTRAL)


def test_bot_admits_it_cannot_help():
    assert should_escalate("I'm sorry, I am unable to assist with that.", "hello", NEUTRAL)


def test_bot_mentioning_transfer_escalates():
    assert should_escalate("You can transfer funds in the app.", "hello", NEUTRAL)


def test_strongly_negative_user_escalates():
    sentiment = {"score": -9.0, "comparative": -3.0, "label": "negative", "magnitude": "high"}
    assert should_escalate("Let me help.", "this is bad", sentiment)


def test_mildly_negative_user_does_not_escalate():
    sentiment = {"score": -2.0, "comparative": -0.3, "label": "negative", "magnitude": "medium"}
    assert not should_escalate("Let me help.", "this is bad", sentiment)


def test_missing_sentiment_is_tolerated():
    assert not should_escalate("Let me help.", "hi there")


def test_negated_complaint_escalates():
    sentiment = analyze_sentiment("I am not happy")
    assert should_escalate("Let me help.", "I am not happy", sentiment)
