"""
View models handed to the rendering collaborators (folium, altair, Streamlit).

Modules
-------
view_model : build_map_view() + build_time_series() + build_both_counts_series()
             + build_ranking_view() + build_dashboard_view() — pure functions
             from a DashboardState snapshot to plain data.
"""
