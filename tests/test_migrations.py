"""Checks on the SQL functions behind transactional writes."""

import re
from pathlib import Path

MIGRATIONS = Path(__file__).resolve().parents[1] / "supabase" / "migrations"


def _function_body(name: str) -> str:
    sql = "\n".join(path.read_text() for path in sorted(MIGRATIONS.glob("*.sql")))
    match = re.search(
        rf"create or replace function {name}\(.*?\$\$(.*?)\$\$;", sql, re.DOTALL
    )
    assert match is not None, name
    return match.group(1)


def test_set_goal_upserts_on_client_start_date() -> None:
    body = _function_body("set_nutrition_goal")

    assert "on conflict (client_id, start_date) do update" in body
    assert "for update" not in body
    assert "trainer_id = excluded.trainer_id" not in body


def test_archive_writes_client_and_notification_together() -> None:
    body = _function_body("archive_client_with_notification")

    assert "current_trainer_id = p_trainer_id" in body
    assert "insert into notifications" in body
    assert body.index("if not found") < body.index("insert into notifications")


def test_period_upserts_use_unique_keys() -> None:
    assert "on conflict (client_id, week_start_date)" in _function_body(
        "upsert_measurement"
    )
    assert "on conflict (client_id, date)" in _function_body("upsert_daily_survey")
    assert "on conflict (client_id, date)" in _function_body("sync_diary_entry")
