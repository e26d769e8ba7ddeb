"""
Tests for producer error classification and user-facing messages.
"""

import json

from google.api_core import exceptions as google_exceptions
from langchain_core.exceptions import OutputParserException

from src.creatorai.errors import (
    GenerationError, MalformedResponse, OverloadedFailure, ProducerFailure, StaleAddress, classify_producer_error,
    user_message,
)


class TestClassify:
    def test_json_decode_error_is_malformed(self):
        try:
            json.loads("{not json")
        except json.JSONDecodeError as e:
            error = classify_producer_error(e, "overview")
        assert isinstance(error, MalformedResponse)
        assert str(error).startswith("JSON_PARSE_ERROR")
        assert error.cause is not None

    def test_output_parser_exception_is_malformed(self):
        assert isinstance(classify_producer_error(OutputParserException("bad output")), MalformedResponse)

    def test_overloaded_text(self):
        error = classify_producer_error(RuntimeError("503 The model is overloaded."))
        assert isinstance(error, OverloadedFailure)
        assert isinstance(error, ProducerFailure)

    def test_resource_exhausted(self):
        error = classify_producer_error(google_exceptions.ResourceExhausted("quota"))
        assert isinstance(error, OverloadedFailure)

    def test_other_errors_are_producer_failures(self):
        error = classify_producer_error(ValueError("network down"))
        assert type(error) is ProducerFailure
        assert "network down" in str(error)

    def test_taxonomy_errors_pass_through(self):
        original = StaleAddress("gone")
        assert classify_producer_error(original) is original

    def test_failure_is_logged(self, caplog):
        classify_producer_error(ValueError("boom"), "techStack")
        assert "techStack" in caplog.text


class TestUserMessage:
    def test_fixed_messages(self):
        assert user_message(OverloadedFailure("503")) == "The model is overloaded. Please try again later."
        assert user_message(MalformedResponse("x")) == "The AI returned an unexpected response. Generation stopped."

    def test_producer_failure_keeps_its_text(self):
        assert user_message(ProducerFailure("quota exceeded for project")) == "quota exceeded for project"

    def test_unknown_exception_uses_fallback(self):
        assert user_message(KeyError("x")) == GenerationError.user_message
        assert user_message(KeyError("x"), "Could not save.") == "Could not save."
