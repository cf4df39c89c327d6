import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load variables from .env
load_dotenv()


class Settings(BaseModel):
    database_url: str = "sqlite+aiosqlite:///./guestform.db"

    # Uploaded files (payment receipts, IDs, pet documents)
    upload_dir: str = "./uploads"
    public_base_url: str = "http://localhost:8000"

    # Google service account shared by Calendar and Sheets
    google_service_account_file: str = ""
    google_calendar_id: str = ""
    google_spreadsheet_id: str = ""
    google_sheet_name: str = "Bookings"

    # E-mail (Resend)
    resend_api_key: str = ""
    email_from: str = "Guest Form <onboarding@resend.dev>"
    admin_emails: str = ""

    # Stay dates are interpreted in the unit's local timezone
    booking_timezone: str = "Asia/Manila"

    # Unit and owner defaults, used when the form leaves them blank
    default_unit_owner: str = "Arianna Perez"
    default_tower_and_unit: str = "Monaco 2604"
    default_onsite_contact: str = "Arianna Perez"
    default_owner_contact_number: str = "0962 541 2941"

    # Rate limiting settings
    rate_limit_enabled: bool = True  # Killswitch for quick disable
    rate_limit_submit: str = "10/minute"

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "console"  # Options: "console", "json"
    log_slow_request_threshold_ms: int = 500  # Log timing only if duration > threshold

    @property
    def admin_email_list(self) -> list[str]:
        return [e.strip() for e in self.admin_emails.split(",") if e.strip()]

    @property
    def google_configured(self) -> bool:
        return bool(self.google_service_account_file) and os.path.exists(
            self.google_service_account_file
        )


settings = Settings(
    database_url=os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./guestform.db"),
    upload_dir=os.environ.get("UPLOAD_DIR", "./uploads"),
    public_base_url=os.environ.get("PUBLIC_BASE_URL", "http://localhost:8000"),
    google_service_account_file=os.environ.get("GOOGLE_SERVICE_ACCOUNT_FILE", ""),
    google_calendar_id=os.environ.get("GOOGLE_CALENDAR_ID", ""),
    google_spreadsheet_id=os.environ.get("GOOGLE_SPREADSHEET_ID", ""),
    google_sheet_name=os.environ.get("GOOGLE_SHEET_NAME", "Bookings"),
    resend_api_key=os.environ.get("RESEND_API_KEY", ""),
    email_from=os.environ.get("EMAIL_FROM", "Guest Form <onboarding@resend.dev>"),
    admin_emails=os.environ.get("ADMIN_EMAILS", ""),
    booking_timezone=os.environ.get("BOOKING_TIMEZONE", "Asia/Manila"),
    default_unit_owner=os.environ.get("DEFAULT_UNIT_OWNER", "Arianna Perez"),
    default_tower_and_unit=os.environ.get("DEFAULT_TOWER_AND_UNIT", "Monaco 2604"),
    default_onsite_contact=os.environ.get("DEFAULT_ONSITE_CONTACT", "Arianna Perez"),
    default_owner_contact_number=os.environ.get(
        "DEFAULT_OWNER_CONTACT_NUMBER", "0962 541 2941"
    ),
    rate_limit_enabled=os.environ.get("RATE_LIMIT_ENABLED", "true").lower() == "true",
    rate_limit_submit=os.environ.get("RATE_LIMIT_SUBMIT", "10/minute"),
    log_level=os.environ.get("LOG_LEVEL", "INFO"),
    log_format=os.environ.get("LOG_FORMAT", "console"),
    log_slow_request_threshold_ms=int(
        os.environ.get("LOG_SLOW_REQUEST_THRESHOLD_MS", "500")
    ),
)
