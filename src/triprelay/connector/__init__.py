"""
Outbound channels to remote services. A channel carries published readings out
and text messages in.
"""
