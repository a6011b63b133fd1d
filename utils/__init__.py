from utils.logger import logger
from utils.screenshot import take_screenshot
from utils.wait_helper import wait_for
from utils.data_loader import load_json, load_payloads, get_test_ids

__all__ = [
    "logger",
    "take_screenshot",
    "wait_for",
    "load_json",
    "load_payloads",
    "get_test_ids",
]
