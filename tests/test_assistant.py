"""Tests for decide_to_run.core.assistant — keyword routing."""

from decide_to_run.core import assistant


class TestAnswer:
    def test_cost_question(self):
        reply = assistant.answer("How much does it COST to run?")
        assert reply.confidence == "high"
        assert "Federal House races: $800,000-$2,500,000" in reply.message
        assert reply.related_questions == [
            "How should I start fundraising?",
            "What are FEC contribution limits?",
        ]

    def test_money_routes_to_cost(self):
        assert assistant.answer("where does the money go").confidence == "high"

    def test_fundraising_question(self):
        reply = assistant.answer("Fundraising tips?")
        assert reply.confidence == "verified"
        assert "$3,300 per election" in reply.message

    def test_cost_wins_over_fundraising(self):
        assert assistant.answer("fundraising cost").confidence == "high"

    def test_default(self):
        reply = assistant.answer("hello")
        assert reply.confidence == "medium"
        assert reply.related_questions[0] == "How much will my campaign cost?"

    def test_empty_message_gets_default(self):
        assert assistant.answer("").confidence == "medium"

    def test_reply_is_a_fresh_copy(self):
        first = assistant.answer("cost")
        first.related_questions.append("mutated")
        assert "mutated" not in assistant.answer("cost").related_questions


class TestLabels:
    def test_confidence_label(self):
        assert assistant.confidence_label("verified") == "Verified"
        assert assistant.confidence_label("low") == "Low Confidence"
        assert assistant.confidence_label(None) == "Medium Confidence"
        assert assistant.confidence_label("bogus") == "Medium Confidence"

    def test_topic_prompt(self):
        assert assistant.topic_prompt("Campaign costs") == "Tell me about campaign costs"
        assert assistant.answer(assistant.topic_prompt("Campaign costs")).confidence == "high"
