import pytest
import utils.file_manager as fm

@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    # Redirect data dir by monkeypatching utils.file_manager's _DATA_DIR
    path = tmp_path / "data"
    monkeypatch.setattr(fm, "_DATA_DIR", path)
    fm.ensure_defaults()
    return path
