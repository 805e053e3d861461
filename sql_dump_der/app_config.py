# -*- coding: utf-8 -*-
"""
Configuration - loaded from environment variables (and .env when present)
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(16 * 1024 * 1024)))

    # Diagram partitioning
    PARTITION_THRESHOLD = int(os.getenv('DER_PARTITION_THRESHOLD', '100'))
    PARTITION_SIZE = int(os.getenv('DER_PARTITION_SIZE', '50'))

    OUTPUT_DIR = os.getenv('DER_OUTPUT_DIR', '.')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    @classmethod
    def get_render_config(cls):
        """Keyword arguments for render_documents"""
        return {
            'partition_threshold': cls.PARTITION_THRESHOLD,
            'partition_size': cls.PARTITION_SIZE
        }

    @classmethod
    def validate(cls):
        if cls.PARTITION_SIZE < 1:
            raise ValueError(f"DER_PARTITION_SIZE must be positive, got {cls.PARTITION_SIZE}")
        if cls.PARTITION_THRESHOLD < 0:
            raise ValueError(f"DER_PARTITION_THRESHOLD must not be negative, got {cls.PARTITION_THRESHOLD}")


class DevelopmentConfig(Config):
    """Development"""
    DEBUG = True


class ProductionConfig(Config):
    """Production"""
    DEBUG = False

    @classmethod
    def validate(cls):
        """Production needs a real secret key"""
        super().validate()
        if not cls.SECRET_KEY or cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            raise ValueError("Production configuration is missing: SECRET_KEY")


class TestingConfig(Config):
    """Testing"""
    TESTING = True
    DEBUG = True


def get_config():
    """Pick the configuration class from FLASK_ENV"""
    env = os.getenv('FLASK_ENV', 'development')

    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig
    }

    return config_map.get(env, DevelopmentConfig)


config = get_config()
