
debug = False #Various debug info

#Passes run when the caller does not select any. The pipeline order is fixed and does not depend on this list.
default_passes = [
    "stringArray",
    "hexBase64",
    "constFold",
    "junk",
    "idRename",
]

#Syntax extensions requested from the parser. Only jsx is understood by esprima.
syntax_extensions = {
    "jsx": True,
    "class_properties": True,
    "optional_chaining": True,
}

regexp_rename = [r'^_?0x[0-9a-fA-F]+$', r'^_0x', r'^[a-zA-Z]_\d+$']
rename_prefix = "var_"

#Host globals that are never renamed
reserved_names = {
    "undefined", "NaN", "Infinity", "console", "window", "global", "require", "module", "exports", "process"
}

console_name = "console" #Calls to console.* are removed by the junk pass
base64_call_name = "atob"
buffer_method_name = "from"

#In-place Array.prototype methods; an array used with one of them is not a constant string table
array_mutators = {
    "push", "pop", "shift", "unshift", "splice", "reverse", "sort", "fill", "copyWithin"
}

max_input_size = 5 * 1024 * 1024 #Bytes, enforced by the command line front end
