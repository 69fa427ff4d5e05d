"""Navigatio API ingress: origin policy, middleware chain and route table."""
