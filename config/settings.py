import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")

# Remote worker execution endpoint; every workflow calls the same one.
WORKER_API_URL = os.getenv("WORKER_API_URL", "https://api.mindstudio.ai/developer/v2/workers/run")
WORKER_API_METHOD = os.getenv("WORKER_API_METHOD", "post")
WORKER_API_CONTENT_TYPE = os.getenv("WORKER_API_CONTENT_TYPE", "application/json")

# Seconds; empty means no client-side deadline.
_timeout_raw = os.getenv("WORKER_API_TIMEOUT", "").strip()
WORKER_API_TIMEOUT = float(_timeout_raw) if _timeout_raw else None

REDIS_URL = os.getenv("REDIS_URL")
REDIS_NAMESPACE = os.getenv("REDIS_NAMESPACE", "invoker")
WORKFLOW_LOCK_TTL = int(os.getenv("WORKFLOW_LOCK_TTL", "120"))


def validate_keys(raise_on_missing: bool = False):
	missing = []
	if not SUPABASE_URL:
		missing.append('SUPABASE_URL')
	if not SUPABASE_KEY:
		missing.append('SUPABASE_KEY')
	if missing and raise_on_missing:
		raise EnvironmentError(f"Missing required env vars: {', '.join(missing)}")
	return missing
