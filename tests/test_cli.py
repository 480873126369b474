from __future__ import annotations

from mongocrud.__main__ import main
from mongocrud.models import UserRecord
from mongocrud.repositories import DocumentRepository

TEST_URI = "mongodb://localhost:27017/test"
TEST_DB = "mongocrud-test"


def test_smoke_command_prints_user_name(mongo_client, capsys) -> None:
    with DocumentRepository(TEST_URI, TEST_DB, UserRecord) as repo:
        repo.insert("Users", UserRecord(user_name="admin", name="Administrator", user_role="root"))

    exit_code = main(["--collection", "Users", "--field", "UserName", "--value", "admin"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "admin"


def test_smoke_command_reports_missing_user(mongo_client, capsys) -> None:
    exit_code = main(["--value", "nobody"])

    assert exit_code == 1
    assert "nobody" in capsys.readouterr().err
