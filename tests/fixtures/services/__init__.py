"""Sample service classes registered by the tests"""
