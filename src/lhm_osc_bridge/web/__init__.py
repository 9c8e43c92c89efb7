"""Web dashboard for the bridge"""
