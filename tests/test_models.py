from progress_tracker.infrastructure.database.models import ProgressBarModel


def test_progress_bar_model_indexes():
    """bar_type indexado e índice composto (start_date, target_date)."""
    assert ProgressBarModel.bar_type.index is True, "ProgressBarModel.bar_type should have index=True"

    indexes = {i.name: i for i in ProgressBarModel.__table__.indexes}
    assert "idx_progress_bars_dates" in indexes, "Composite index 'idx_progress_bars_dates' should exist"

    col_names = [c.name for c in indexes["idx_progress_bars_dates"].columns]
    assert col_names == ["start_date", "target_date"], f"Index columns should be ['start_date', 'target_date'], but got {col_names}"


def test_progress_bar_model_dates_are_timezone_aware():
    for column in ("start_date", "target_date", "created_at", "updated_at"):
        assert ProgressBarModel.__table__.c[column].type.timezone is True
