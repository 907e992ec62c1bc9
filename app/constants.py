import os

APP_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_DIR = os.environ.get('ATCREATOR_CONFIG_DIR', os.path.join(APP_DIR, 'config'))
DB_FILE = os.path.join(CONFIG_DIR, 'atcreator.db')
CONFIG_FILE = os.path.join(CONFIG_DIR, 'settings.yaml')
SECRET_KEY_FILE = os.path.join(CONFIG_DIR, '.secret_key')

ATCREATOR_DB = 'sqlite:///' + DB_FILE

BUILD_VERSION = '20261019_1200'

# Tag categories, in display order
CATEGORY_CITY = 'City'
CATEGORY_INDUSTRY = 'Industry'
CATEGORY_ROLE = 'Role'
CATEGORY_COMPANY = 'Company'
CATEGORY_COMPANY_SIZE = 'CompanySize'
CATEGORY_RELATION_TYPE = 'RelationType'
CATEGORY_SKILLS = 'Skills'
CATEGORY_INTEREST = 'Interest'
CATEGORY_STATUS = 'Status'
CATEGORY_SOURCE = 'Source'
UNCATEGORIZED = 'Uncategorized'

TAG_CATEGORIES = [
    CATEGORY_CITY,
    CATEGORY_INDUSTRY,
    CATEGORY_ROLE,
    CATEGORY_COMPANY,
    CATEGORY_COMPANY_SIZE,
    CATEGORY_RELATION_TYPE,
    CATEGORY_SKILLS,
    CATEGORY_INTEREST,
    CATEGORY_STATUS,
    CATEGORY_SOURCE,
    UNCATEGORIZED,
]

# Filter states for a tag on the generation page (absence = neutral)
TAG_STATE_NEUTRAL = 'neutral'
TAG_STATE_INCLUDE = 'include'
TAG_STATE_EXCLUDE = 'exclude'

TAG_STATES = [TAG_STATE_NEUTRAL, TAG_STATE_INCLUDE, TAG_STATE_EXCLUDE]

# Bulk tag modes
BULK_MODE_ADD = 'add'
BULK_MODE_REMOVE = 'remove'

NAME_MAX_LENGTH = 100
TAG_NAME_MAX_LENGTH = 100

# Flask session key holding the generation page state
GENERATION_SESSION_KEY = 'generation'

DEFAULT_SETTINGS = {
    "database": {
        "uri": ATCREATOR_DB,
    },
    "auth": {
        "login_rate_limit": "20 per minute",
    },
    "generation": {
        "record_solicitations": True,
    },
}
