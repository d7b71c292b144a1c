TLiteral = bool | int | float | str | bytes
TComposite = (
	list[TLiteral] | dict[TLiteral, TLiteral] | set[TLiteral] | tuple[TLiteral, ...]
)
TComposite2 = (
	list[TLiteral | TComposite]
	| dict[TLiteral, TLiteral | TComposite]
	| set[TLiteral | TComposite]
	| tuple[TLiteral | TComposite, ...]
)
TPrimitive = bool | int | float | str | bytes | TComposite | TComposite2

# EOF
