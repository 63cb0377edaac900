"""
Inbound-call routing: ring-loop states, callback URLs and the decision engine.
"""
