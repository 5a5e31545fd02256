"""
Processing layers: matching, registry, feedback and refinement
"""
