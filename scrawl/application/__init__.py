"""应用层"""
