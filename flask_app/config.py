"""
Flask application configuration.
"""
import os


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-please-change-in-production'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Unsaved-changes prompt copy
    UNSAVED_CHANGES_TITLE = os.environ.get('UNSAVED_CHANGES_TITLE', 'Alterações não salvas')
    UNSAVED_CHANGES_MESSAGE = os.environ.get(
        'UNSAVED_CHANGES_MESSAGE',
        'Você tem alterações não salvas. Deseja realmente sair? Todas as alterações serão perdidas.'
    )
    UNSAVED_CHANGES_CONFIRM_LABEL = os.environ.get('UNSAVED_CHANGES_CONFIRM_LABEL', 'Sair sem salvar')
    UNSAVED_CHANGES_CANCEL_LABEL = os.environ.get('UNSAVED_CHANGES_CANCEL_LABEL', 'Cancelar')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
