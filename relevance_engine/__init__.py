from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from config import config_dict
import os
import time
import logging
from logging.config import dictConfig
import sentry_sdk
from sentry_sdk.integrations.flask import FlaskIntegration


db = SQLAlchemy()
migrate = Migrate()
cache = Cache()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per hour"]
)

logger = logging.getLogger(__name__)


def try_connect_db(app, retries=3):
    for attempt in range(retries):
        try:
            with app.app_context():
                with db.engine.connect():
                    return True
        except Exception as e:
            app.logger.error(f"Database connection attempt {attempt + 1} failed: {e}")
            time.sleep(1)
    return False


def _init_cache(app):
    """Redis-backed cache when REDIS_URL is usable, SimpleCache otherwise."""
    redis_url = app.config.get('REDIS_URL')
    try:
        if redis_url and redis_url.strip():
            try:
                cache.init_app(app, config={
                    'CACHE_TYPE': 'RedisCache',
                    'CACHE_REDIS_URL': redis_url,
                    'CACHE_DEFAULT_TIMEOUT': app.config.get('SLATE_CACHE_TIMEOUT', 300),
                    'CACHE_KEY_PREFIX': 'relevance_cache_',
                    'CACHE_OPTIONS': {
                        'socket_timeout': 5,
                        'socket_connect_timeout': 5
                    }
                })
                app.logger.info("Cache initialized with Redis URL")
            except Exception as e:
                app.logger.warning(f"Redis cache initialization failed: {e}, falling back to simple cache")
                cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})
        else:
            app.logger.warning("No REDIS_URL available, using simple cache")
            cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})
    except Exception as e:
        app.logger.error(f"Cache initialization error: {e}")
        cache.init_app(app, config={'CACHE_TYPE': 'SimpleCache'})


def _init_limiter(app, env):
    redis_url = app.config.get('RATELIMIT_STORAGE_URL')
    if redis_url and not redis_url.startswith('memory://'):
        try:
            import redis
            r = redis.from_url(redis_url)
            r.ping()
            app.config['RATELIMIT_STORAGE_URI'] = redis_url
            app.logger.info(f"Rate limiter configured with Redis ({env})")
        except Exception as redis_error:
            app.logger.warning(f"Redis connection failed: {redis_error}, using memory storage")
            app.config['RATELIMIT_STORAGE_URI'] = 'memory://'
    else:
        app.config['RATELIMIT_STORAGE_URI'] = 'memory://'
        if env == 'production':
            app.logger.error("Rate limiter using memory storage in production - limits won't be shared across instances")
        else:
            app.logger.warning("Rate limiter using memory storage - development mode only")
    limiter.init_app(app)


def create_app(config_name=None):
    env = config_name or os.getenv('FLASK_ENV', 'development')
    config_class = config_dict.get(env, config_dict['development'])

    app = Flask(__name__)

    dictConfig(config_class.LOGGING_CONFIG)
    app.config.from_object(config_class)

    # Sentry in production only
    if env == 'production' and app.config.get('SENTRY_DSN'):
        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.2,
        )

    _init_cache(app)

    db.init_app(app)
    migrate.init_app(app, db)

    _init_limiter(app, env)

    if not try_connect_db(app):
        raise RuntimeError("Could not establish database connection")

    # Register models with SQLAlchemy metadata
    from relevance_engine import models  # noqa: F401

    from relevance_engine.api import init_api
    init_api(app)

    from relevance_engine.commands import init_commands
    init_commands(app)

    # Background jobs: not during tests or migrations
    if (
        app.config.get('SCHEDULER_ENABLED')
        and not app.config.get('TESTING')
        and not app.config.get('SQLALCHEMY_MIGRATE')
    ):
        from relevance_engine.scheduler import init_scheduler, start_scheduler
        try:
            init_scheduler(app)
            start_scheduler()
        except Exception as e:
            app.logger.error(f"Failed to start scheduler: {e}", exc_info=True)

    return app
