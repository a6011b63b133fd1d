"""
測試資料載入器
從 test_data/ 載入 JSON 測試資料，搭配 pytest.mark.parametrize 做資料驅動測試。

用法：
    from utils.data_loader import load_json, load_payloads, get_test_ids

    CASES = load_json("credentials.json")

    @pytest.mark.parametrize("case", CASES, ids=get_test_ids(CASES))
    def test_login(case):
        ...

    sql = load_payloads("sql_injection")
"""

import json
from pathlib import Path

from core.exceptions import TestDataError

DATA_DIR = Path(__file__).resolve().parent.parent / "test_data"
PAYLOAD_FILE = "security_payloads.json"


def load_json(filename: str, data_dir: Path | None = None):
    """從 JSON 檔載入測試資料"""
    filepath = Path(data_dir or DATA_DIR) / filename
    if not filepath.exists():
        raise TestDataError(f"找不到測試資料: {filepath}", context={"path": str(filepath)})
    with open(filepath, "r", encoding="utf-8") as f:
        return json.load(f)


def load_payloads(category: str, data_dir: Path | None = None) -> list[str]:
    """從 security_payloads.json 取出某一類 payload"""
    data = load_json(PAYLOAD_FILE, data_dir)
    if category not in data:
        raise TestDataError(
            f"未知的 payload 類別: {category} (可用: {', '.join(data)})",
            context={"category": category},
        )
    return list(data[category])


def get_test_ids(data: list[dict], key: str = "case_id") -> list[str]:
    """從資料中取出 case_id 作為 pytest 的測試 ID"""
    return [str(item.get(key, f"case_{i}")) for i, item in enumerate(data)]
