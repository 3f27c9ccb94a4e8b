"""vhostplan tests"""
