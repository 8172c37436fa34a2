import os
import tempfile

# Settings are read once at import time, so pin them before nexacrm is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test_nexacrm.db"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="nexacrm-uploads-")
os.environ["FIRECRAWL_API_KEY"] = ""
os.environ["GOOGLE_MAPS_API_KEY"] = ""
os.environ["OWNER_EMAIL"] = "owner@example.com"
os.environ["JWT_SECRET"] = "test-secret"
