import os
import sys
from pathlib import Path
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent
# Try root project .env (one directory up from BASE_DIR) first, then local
root_env = (BASE_DIR.parent / '.env')
local_env = (BASE_DIR / '.env')
if root_env.exists():
    load_dotenv(root_env)
elif local_env.exists():
    load_dotenv(local_env)

# ---------------------------------------------------------------------------
# SECRET KEY HANDLING
# The storefront does not sign anything itself, but Django refuses to start
# without a key. In production (DEBUG=False) we still require a real one.
# ---------------------------------------------------------------------------
SECRET_KEY = (
    os.getenv('DJANGO_SECRET_KEY')
    or os.getenv('SECRET_KEY')
    or 'dev-secret-key'
)
DEBUG = os.getenv('DEBUG', 'True') == 'True'

if SECRET_KEY == 'dev-secret-key' and not DEBUG:
    raise ImproperlyConfigured(
        'SECRET_KEY is using the insecure default. Set DJANGO_SECRET_KEY or SECRET_KEY env var.'
    )

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'apps.common',
    'apps.carts',
]

# The cart is a local cache; nothing in this project talks to a database.
DATABASES = {}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------------
# CART STORAGE
# The cart survives restarts through a single named slot. The default
# backend is a file based Django cache without expiry, so the slot lives on
# local disk next to the application.
# ---------------------------------------------------------------------------
CART_STORAGE_DIR = Path(
    os.getenv('CART_STORAGE_DIR', str(BASE_DIR / '.cart-storage'))
)

CART_STORAGE = {
    'BACKEND': os.getenv('CART_STORAGE_BACKEND', 'cache'),
    'KEY': os.getenv('CART_STORAGE_KEY', 'cart-storage'),
    'CACHE_ALIAS': 'carts',
    'FILE_PATH': os.getenv(
        'CART_STORAGE_FILE', str(CART_STORAGE_DIR / 'cart-storage.json')
    ),
    'FAIL_OPEN': os.getenv('CART_STORAGE_FAIL_OPEN', 'True') == 'True',
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'storefront-default',
    },
    'carts': {
        'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
        'LOCATION': str(CART_STORAGE_DIR / 'cache'),
        'KEY_PREFIX': os.getenv('CACHE_KEY_PREFIX', 'storefront'),
        # Cart entries never expire; they are removed by clearing the cart.
        'TIMEOUT': None,
    },
}

# Keep tests off the developer's real cart slot
USING_PYTEST = (
    os.getenv('PYTEST_CURRENT_TEST') is not None
    or 'pytest' in sys.modules
    or any(os.path.basename(arg).startswith('pytest') for arg in sys.argv)
)

if 'test' in sys.argv or USING_PYTEST:
    CACHES['carts'] = {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'storefront-test-carts',
        'TIMEOUT': None,
    }

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': True,
        },
    },
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
