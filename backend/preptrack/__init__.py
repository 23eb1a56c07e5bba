"""
PrepTrack backend: exam practice tracking with chat and presence.
"""
