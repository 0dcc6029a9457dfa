"""
Runtime ownership of pipeline resources and the error taxonomy.
"""
