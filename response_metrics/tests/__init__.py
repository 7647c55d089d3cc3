'''
Response Metrics Test Suite

Test Modules:
-------------
- test_range_resolver.py: Preset/custom windows, anchors, date parsing
- test_row_filter.py: Inclusive filtering and invalid ranges
- test_aggregator.py: Team/employee/daily/heatmap rollups and rounding
- test_exporter.py: Display formatting, CSV quoting and filenames
- test_email_activity.py: Tracked email rollups and unanswered list
- test_live_updates.py: Row deltas and stale read protection
- test_data_source.py: Postgres source mapping and failure handling
- test_dashboard_service.py: Pipeline orchestration and exports
- test_api.py: FastAPI endpoints with overridden dependencies

Running Tests:
--------------
    pip install -e ".[test]"
    pytest
'''

__all__ = []
