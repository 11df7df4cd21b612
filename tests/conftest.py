"""
Pytest configuration and fixtures
"""
import pytest
import os
import sys
import tempfile
import shutil

import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp(prefix="siswatch_test_")
    yield temp_path
    # Cleanup after test
    if os.path.exists(temp_path):
        shutil.rmtree(temp_path)


@pytest.fixture
def io_dirs(temp_dir):
    """Separate input and output directories"""
    inpath = os.path.join(temp_dir, "in")
    outpath = os.path.join(temp_dir, "out")
    os.makedirs(inpath)
    os.makedirs(outpath)
    return inpath, outpath


@pytest.fixture
def temp_config(temp_dir):
    """Path for a temporary config file"""
    return os.path.join(temp_dir, "config.json")


@pytest.fixture
def sample_frame():
    """A 4x6 frame with distinct values, including the extremes"""
    frame = np.arange(24, dtype=np.uint16).reshape(4, 6) * 1000
    frame[0, 0] = 0
    frame[-1, -1] = 65535
    return frame


@pytest.fixture
def write_sis():
    """Write a uint16 grid as an SIS file and return its path"""
    from services.sis_image import SisImage
    
    def _write(path, arr):
        SisImage.from_array(np.asarray(arr, dtype=np.uint16)).write(path)
        return path
    
    return _write


# Mark slow tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
