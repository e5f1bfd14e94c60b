from typing import Dict, Any, Union
import logging
import re
import traceback

_SECRET_KEY_RE = re.compile(r"(?i)(key|token|secret|authorization|apikey|api_key|password|passwd|bearer)")
_SECRET_VAL_RE = re.compile(r"(?i)^(?:sk|ghp|hf|xox|ya29|eyJ|pk_|rk_)[A-Za-z0-9\-\._]{8,}$")

REDACTED = "***REDACTED***"


def _mask_value(v: Any) -> Any:
    if isinstance(v, str):
        # long token-like strings
        if _SECRET_VAL_RE.search(v.strip()):
            return REDACTED
        if v.lower().startswith("bearer "):
            return "Bearer " + REDACTED
    return v


def sanitize(obj: Any) -> Any:
    """Return a copy of ``obj`` with secret-looking keys and values masked.

    Worker auth tokens travel through invocation context, so anything that is
    logged goes through here first.
    """
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if _SECRET_KEY_RE.search(str(k)):
                out[k] = REDACTED
            else:
                out[k] = sanitize(v)
        return out
    if isinstance(obj, (list, tuple)):
        return [sanitize(x) for x in obj]
    return _mask_value(obj)


logger = logging.getLogger('platform_monitoring')


def log_event(event: Union[str, Dict[str, Any]], payload: Dict[str, Any] | None = None):
    """Log a monitoring event to the central logger.

    Accepts either ``log_event('name', {...})`` or ``log_event({'event': 'name', ...})``.
    """
    if isinstance(event, str):
        record = {'event': event, **(payload or {})}
    else:
        record = event
    logger.info('MONITOR_EVENT %s', sanitize(record))


def log_error(error: BaseException, context: Dict[str, Any] | None = None):
    """Report a failure with its stack and caller-supplied context."""
    record = {
        'message': str(error) or type(error).__name__,
        'type': type(error).__name__,
        'stack': ''.join(traceback.format_exception(type(error), error, error.__traceback__)),
        'context': context or {},
    }
    logger.error('MONITOR_ERROR %s', sanitize(record))
    return record
