import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Test environment must be in place before settings are first loaded
os.environ['TESTING'] = 'true'
os.environ['LOG_LEVEL'] = 'ERROR'  # Reduce noise in tests
os.environ['LOG_FORMAT'] = 'console'
os.environ['METRICS_ENABLED'] = 'false'

from config.environment import reload_settings
from config.selector_config import load_selector_config
from tasks.base import RiskLevel, TaskCategory, TaskPriority
from tasks.catalog import TaskCatalog
from tests.utils.fakes import FakeClock, make_descriptor, make_task_class


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment before each test"""
    os.environ['TESTING'] = 'true'
    os.environ['LOG_LEVEL'] = 'ERROR'

    # Reload settings to pick up the environment variables
    reload_settings()

    yield


@pytest.fixture
def clock():
    """Manually advanced clock shared by the engine and the test."""
    return FakeClock()


@pytest.fixture
def selector_config():
    """Selector configuration from config.yaml."""
    return load_selector_config()


@pytest.fixture
def successful_result():
    return {"success": True, "insights": ["a", "b"], "value": 0.5}


@pytest.fixture
def catalog(successful_result):
    """Three-task catalog with deterministic, successful tasks."""
    catalog = TaskCatalog()
    catalog.register(
        make_descriptor("enhanced_priority_fee_analysis", TaskCategory.PERFORMANCE_OPTIMIZATION,
                        TaskPriority.HIGH, "10-20 minutes", RiskLevel.LOW),
        make_task_class(result=successful_result, metadata={"value_score": 0.8}),
    )
    catalog.register(
        make_descriptor("learn_from_others", TaskCategory.LEARNING_INTELLIGENCE,
                        TaskPriority.MEDIUM, "10-20 minutes", RiskLevel.LOW),
        make_task_class(result=successful_result),
    )
    catalog.register(
        make_descriptor("newsletter_analysis", TaskCategory.MARKET_INTELLIGENCE,
                        TaskPriority.LOW, "5-15 minutes", RiskLevel.LOW),
        make_task_class(result=successful_result, metadata={"value_score": 0.2}),
    )
    return catalog


@pytest.fixture
def engine(catalog, selector_config, clock):
    """Engine over the test catalog; loops are only started by tests that call start()."""
    from agents.task_selector import AutonomousTaskSelector

    engine = AutonomousTaskSelector(catalog=catalog, config=selector_config, clock=clock)
    yield engine
    if engine.thread_pool is not None:
        engine.thread_pool.shutdown(wait=False)
