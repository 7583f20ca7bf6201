import os
from dotenv import load_dotenv

load_dotenv()

# --- App ---
APP_NAME = os.getenv("APP_NAME", "Lifelog")
APP_URL = os.getenv("APP_URL", "")
DATA_VERSION = "1.0.0"

# --- Supabase Configuration ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# Tables (PostgREST)
PROFILES_TABLE = os.getenv("PROFILES_TABLE", "profiles")
ENTRIES_TABLE = os.getenv("ENTRIES_TABLE", "journal_entries")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

# --- JWT Configuration (Supabase access tokens) ---
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "change-this-secret-key")
JWT_ALGORITHM = "HS256"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")

# --- Cron endpoints ---
CRON_SECRET = os.getenv("CRON_SECRET", "")

# --- Firebase Cloud Messaging ---
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL", "")
# Keys pasted into .env usually carry literal "\n" sequences
FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n")

# --- Reminders ---
REMINDER_TIMEZONE = os.getenv("REMINDER_TIMEZONE", "Asia/Kolkata")
DEFAULT_REMINDER_TIME = os.getenv("DEFAULT_REMINDER_TIME", "12:10")


def is_supabase_configured() -> bool:
    """Check if Supabase is properly configured with required environment variables."""
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY)


def is_firebase_configured() -> bool:
    return bool(FIREBASE_PROJECT_ID and FIREBASE_CLIENT_EMAIL and FIREBASE_PRIVATE_KEY)
