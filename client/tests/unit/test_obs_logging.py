import json
import logging

from recipeshare.obs.logging import JSONLogFormatter, bind_context, reset_context


def _record(msg: str, **extra) -> logging.LogRecord:
	record = logging.LogRecord("recipeshare.test", logging.WARNING, __file__, 1, msg, None, None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_formatter_redacts_credentials_and_truncates():
	payload = json.loads(
		JSONLogFormatter().format(
			_record(
				"directory request rejected",
				authorization="Bearer abc",
				email="me@example.com",
				ids=[str(i) for i in range(20)],
				status=500,
			)
		)
	)

	assert payload["msg"] == "directory request rejected"
	assert payload["level"] == "warning"
	assert payload["authorization"] == "[redacted]"
	assert payload["email"] == "[redacted]"
	assert payload["status"] == 500
	assert len(payload["ids"]) == 11
	assert payload["ids"][-1] == "…"


def test_bound_context_is_emitted_and_reset():
	formatter = JSONLogFormatter()
	tokens = bind_context(user_id="u-me", view="user_search", fetch_id="3:1")
	try:
		payload = json.loads(formatter.format(_record("fetch")))
	finally:
		reset_context(tokens)

	assert payload["user_id"] == "u-me"
	assert payload["view"] == "user_search"
	assert payload["fetch_id"] == "3:1"

	after = json.loads(formatter.format(_record("fetch")))
	assert "fetch_id" not in after
