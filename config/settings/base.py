"""
Django base settings for task_rota project.
Shared settings between development, production and test.
"""

from pathlib import Path
from decouple import config

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_q',
]

LOCAL_APPS = [
    'apps.accounts',
    'apps.tasks',
    'apps.activity_log',
    'apps.assignments',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# AUTHENTICATION - Custom User Model
# =============================================================================
# Must be set BEFORE first migration
AUTH_USER_MODEL = 'accounts.User'

# Admin-only views send anonymous and non-admin users to the admin login
LOGIN_URL = 'admin:login'

# Password hashing - use Argon2 as primary
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.Argon2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher',
]


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'en-us'

# "Today" and the scheduled time of day are always local to this zone
TIME_ZONE = config('TIME_ZONE', default='Asia/Kolkata')

USE_I18N = True

USE_TZ = True

DATE_FORMAT = 'j M Y'
TIME_FORMAT = 'g:i A'
DATETIME_FORMAT = 'j M Y, g:i A'
SHORT_DATE_FORMAT = 'd/m/Y'
SHORT_DATETIME_FORMAT = 'd/m/Y g:i A'


# =============================================================================
# STATIC FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# DUE DATE POLICY
# =============================================================================
# Days added to today before taking the end of that day as the deadline.
# Daily tasks are due before the next day begins.
# A daily horizon of 0 is what puts today's tasks in today's existing-assignment index.
DUE_DATE_HORIZON_DAYS = {
    'daily': config('DUE_DATE_DAILY_DAYS', default=0, cast=int),
    'weekly': config('DUE_DATE_WEEKLY_DAYS', default=7, cast=int),
    'monthly': config('DUE_DATE_MONTHLY_DAYS', default=15, cast=int),
}


# =============================================================================
# AUTO-ASSIGNMENT
# =============================================================================
AUTO_ASSIGN = {
    # Scheduler loop cadence
    'TICK_INTERVAL_SECONDS': config('AUTO_ASSIGN_TICK_INTERVAL_SECONDS', default=60, cast=int),
    # Tolerance around the configured time of day
    'WINDOW_MINUTES': config('AUTO_ASSIGN_WINDOW_MINUTES', default=1, cast=int),

    # Seed values for the persisted configuration
    'DEFAULT_STRATEGY': config('AUTO_ASSIGN_DEFAULT_STRATEGY', default='distribute'),
    'DEFAULT_INCLUDE_UNASSIGNED': config('AUTO_ASSIGN_DEFAULT_INCLUDE_UNASSIGNED', default=True, cast=bool),
    'DEFAULT_ASSIGN_TO_ALL_USERS': config('AUTO_ASSIGN_DEFAULT_ASSIGN_TO_ALL_USERS', default=True, cast=bool),
    'DEFAULT_SKIP_EXISTING': config('AUTO_ASSIGN_DEFAULT_SKIP_EXISTING', default=True, cast=bool),
    'DEFAULT_SCHEDULE_TIME': config('AUTO_ASSIGN_DEFAULT_SCHEDULE_TIME', default='09:00'),
}


# =============================================================================
# DJANGO-Q2 SETTINGS (Background Tasks)
# =============================================================================
Q_CLUSTER = {
    'name': 'task_rota',
    'workers': 2,
    'recycle': 500,
    'timeout': 60,
    'retry': 120,
    'compress': True,
    'save_limit': 250,
    'queue_limit': 500,
    'cpu_affinity': 1,
    'label': 'Django Q2',
    'orm': 'default',
}


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
