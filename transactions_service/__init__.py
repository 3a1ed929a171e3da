"""Real-estate transaction tracking service"""
