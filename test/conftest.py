"""
Test configuration for TinyFn tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from reader import create_reader
from interpreter import create_interpreter


@pytest.fixture
def reader():
  """Provide a fresh reader for each test"""
  return create_reader()


@pytest.fixture
def interpreter():
  """Provide a fresh interpreter for each test"""
  return create_interpreter()
