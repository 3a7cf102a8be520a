"""
Services package: identity, sessions, wallet and payment orchestration
"""
