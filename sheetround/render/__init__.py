"""
HTML rendering of tables as editable forms.
"""
