"""
Error taxonomy for template handling and grid assembly.
"""


class NameGridError(Exception):
	pass


class TemplateParseError(NameGridError):
	pass


class MissingTemplate(NameGridError):
	pass


class MissingTextNode(NameGridError):
	pass


class MeasurementUnavailable(NameGridError):
	pass
