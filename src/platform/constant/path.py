from pathlib import Path


# Repository root
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Rotating log files (overridden by TEST_LOG_DIR under pytest)
LOG_DIR = BASE_DIR / 'logs'

# Jinja templates for customer emails
EMAIL_TEMPLATE_DIR = (
    BASE_DIR / 'src' / 'service' / 'box_office' / 'driven_adapter' / 'email' / 'templates'
)
