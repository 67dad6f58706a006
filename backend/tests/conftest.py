import os
import tempfile

# Settings are read on first import of billing; keep tests off the real database and log files
os.environ.setdefault("DATABASE_URI", f"sqlite:///{os.path.join(tempfile.gettempdir(), 'billing_unused.db')}")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("PAYMENT_REQUEST_EXPIRY_ENABLED", "false")
