import os

# mbclient.main reads its configuration at import time.
os.environ.setdefault("MEDIABROWSER_URL", "http://mb.test/mediabrowser/api")
