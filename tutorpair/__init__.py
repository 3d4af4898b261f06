"""Peer tutoring pairing service"""
