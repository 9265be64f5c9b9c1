"""
Dashboard state: write-once data store, immutable UI snapshot, pure reducer.

Modules
-------
store : DashboardData + DashboardState + events + initial_state() + reduce().
"""
