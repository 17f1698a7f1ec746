import os

# Load .env.test for tests if present, e.g. to set TEST_DATABASE_URL and run
# the suite against a local Postgres instead of per-test SQLite files.
# Variables already set in the environment win.
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=False)
