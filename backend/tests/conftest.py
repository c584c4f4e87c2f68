"""Root conftest — shared test configuration."""

import os
import tempfile

# Ensure tests don't accidentally use real API keys or services
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-placeholder")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("SYSTEM_API_KEY", "test-system-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("SMTP_HOST", "")

# Static roots are mounted at import time; keep them out of the working tree
_var = tempfile.mkdtemp(prefix="hackshield-tests-")
for name in ("WORKSPACE_ROOT", "PREVIEW_ROOT", "DEPLOYMENT_ROOT", "UPLOAD_ROOT"):
    os.environ.setdefault(name, os.path.join(_var, name.lower()))
