from dotenv import load_dotenv
import os

load_dotenv()


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')

    if not SQLALCHEMY_DATABASE_URI:
        raise ValueError("DATABASE_URL environment variable not set")

    # Heroku-style URLs still use the old scheme
    if SQLALCHEMY_DATABASE_URI.startswith('postgres://'):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 5,
        'max_overflow': 10,
        'pool_timeout': 30,
        'connect_args': {
            'connect_timeout': 10,
            'keepalives': 1,
            'keepalives_idle': 60,
            'keepalives_interval': 10,
            'keepalives_count': 5
        }
    }

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'default': {
                'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': 'INFO',
                'formatter': 'default',
            },
        },
        'root': {
            'handlers': ['console'],
            'level': 'INFO',
        }
    }

    DB_RETRY_ATTEMPTS = 3
    DB_RETRY_DELAY = 1  # seconds

    REDIS_URL = os.getenv('REDIS_URL')
    RATELIMIT_STORAGE_URL = os.getenv('REDIS_URL', 'memory://')
    SENTRY_DSN = os.getenv('SENTRY_DSN')

    # Shared secret for the job trigger endpoints (external cron)
    CRON_SECRET = os.getenv('CRON_SECRET')

    SCHEDULER_ENABLED = os.getenv('SCHEDULER_ENABLED', 'True').lower() == 'true'

    # Slate settings
    DEFAULT_SLATE_SIZE = int(os.getenv('DEFAULT_SLATE_SIZE', '10'))
    MAX_SLATE_SIZE = int(os.getenv('MAX_SLATE_SIZE', '50'))
    MIN_SLATE_SCORE = int(os.getenv('MIN_SLATE_SCORE', '15'))
    SLATE_CACHE_TIMEOUT = int(os.getenv('SLATE_CACHE_TIMEOUT', '300'))

    # Batch refresh worker pool
    RELEVANCE_WORKERS = int(os.getenv('RELEVANCE_WORKERS', '4'))

    # Semantic classification fallback (external LLM)
    SEMANTIC_CLASSIFIER_ENABLED = os.getenv('SEMANTIC_CLASSIFIER_ENABLED', 'True').lower() == 'true'
    SEMANTIC_CLASSIFIER_TIMEOUT = float(os.getenv('SEMANTIC_CLASSIFIER_TIMEOUT', '10'))

    # Learning pipeline
    FEEDBACK_LOOKBACK_DAYS = int(os.getenv('FEEDBACK_LOOKBACK_DAYS', '7'))
    FEEDBACK_BATCH_SIZE = int(os.getenv('FEEDBACK_BATCH_SIZE', '50'))

    FILTER_LOG_RETENTION_DAYS = int(os.getenv('FILTER_LOG_RETENTION_DAYS', '30'))


class DevelopmentConfig(Config):
    FLASK_ENV = 'development'
    DEBUG = True
    SQLALCHEMY_ECHO = True


class ProductionConfig(Config):
    FLASK_ENV = 'production'
    DEBUG = False
    PREFERRED_URL_SCHEME = 'https'
    CACHE_DEFAULT_TIMEOUT = 300


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # SQLite does not support pool_size and friends
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    SCHEDULER_ENABLED = False
    SEMANTIC_CLASSIFIER_ENABLED = False
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URL = 'memory://'
    REDIS_URL = None
    CRON_SECRET = 'test-cron-secret'
    RELEVANCE_WORKERS = 2


# Dictionary to easily access configurations
config_dict = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
