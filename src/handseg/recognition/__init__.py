"""Hand summary and finger count testing."""
from .hand_model import HandModel, MAX_FINGERS
from .finger_test import FingerTest, FingerTestConfig, FingerTestResult
