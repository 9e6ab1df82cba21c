import sys


# Turns a node into nested dicts/lists so it can be printed (or compared in tests)
def ast_to_dict(node):
    if node is None:
        return None

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Literal":
        d["kind"] = node.token.type
        d["value"] = node.token.lexeme
    elif t == "Binary":
        d["op"] = node.op.lexeme
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "Unary":
        d["op"] = node.op.lexeme
        d["operand"] = ast_to_dict(node.operand)
    elif t == "Variable":
        d["name"] = node.name.lexeme
    elif t == "Assign":
        d["name"] = node.name.lexeme
        d["value"] = ast_to_dict(node.value)
    elif t == "Call":
        d["callee"] = ast_to_dict(node.callee)
        d["args"] = [ast_to_dict(a) for a in node.args]
    elif t == "ListAccess":
        d["list"] = ast_to_dict(node.list_expr)
        d["index"] = ast_to_dict(node.index)
    elif t == "ListMethod":
        d["list"] = ast_to_dict(node.list_expr)
        d["method"] = node.method.lexeme
        d["argument"] = ast_to_dict(node.argument)
    elif t == "ListProperty":
        d["list"] = ast_to_dict(node.list_expr)
        d["property"] = node.prop.lexeme
    elif t == "Expression":
        d["expr"] = ast_to_dict(node.expr)
    elif t == "VarDecl":
        d["name"] = node.name.lexeme
        d["var_type"] = str(node.var_type)
        d["initializer"] = ast_to_dict(node.initializer)
    elif t == "Block":
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["then_branch"] = ast_to_dict(node.then_branch)
        d["else_branch"] = ast_to_dict(node.else_branch)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "For":
        d["init"] = ast_to_dict(node.init)
        d["condition"] = ast_to_dict(node.condition)
        d["increment"] = ast_to_dict(node.increment)
        d["body"] = ast_to_dict(node.body)
    elif t == "Return":
        d["value"] = ast_to_dict(node.value)
    elif t == "FunctionDecl":
        d["name"] = node.name.lexeme
        d["return_type"] = str(node.return_type)
        d["params"] = [f"{ptype} {p.lexeme}" for p, ptype in zip(node.params, node.param_types)]
        d["body"] = ast_to_dict(node.body)
    elif t == "Include":
        d["path"] = node.path.lexeme
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)) and v:
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {'[]' if v == [] else v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def dump_ast(statements, stream=None):
    stream = stream if stream is not None else sys.stdout
    print("===== AST DUMP =====", file=stream)
    for stmt in statements:
        print(pretty(ast_to_dict(stmt)), file=stream)
    print("===== END AST DUMP =====", file=stream)
