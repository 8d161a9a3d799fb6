"""
Core package for cranker

Contains the error taxonomy, the job pipeline and the persistable contract.
"""
