"""Configuration selection and overrides."""
from checkin import create_app
from config import get_config
from config.base import BaseConfig
from config.production import ProductionConfig
from config.testing import TestingConfig

def test_get_config_by_name():
    assert get_config('testing') is TestingConfig
    assert get_config('production') is ProductionConfig

def test_testing_config_leaves_upload_folder_to_the_fixture():
    assert 'EVIDENCE_UPLOAD_FOLDER' not in vars(TestingConfig)
    assert TestingConfig.EVIDENCE_UPLOAD_FOLDER == BaseConfig.EVIDENCE_UPLOAD_FOLDER

def test_overrides_apply_on_top_of_config_class(tmp_path):
    app = create_app('testing', {'EVIDENCE_UPLOAD_FOLDER': str(tmp_path), 'CHECKIN_RATE_LIMIT': '1 per minute'})

    assert app.config['EVIDENCE_UPLOAD_FOLDER'] == str(tmp_path)
    assert app.config['CHECKIN_RATE_LIMIT'] == '1 per minute'
    assert app.config['TESTING'] is True
