from lark import Tree


class ParseTreeListener:
    """
    Receives `enter_<rule>` before a rule's children are walked and
    `exit_<rule>` after all of them. Rules without a handler are skipped.
    """

    def enter_every_rule(self, tree):
        pass

    def exit_every_rule(self, tree):
        pass

    def dispatch(self, prefix, tree):
        f = getattr(self, f"{prefix}_{tree.data}", None)
        if f is not None:
            f(tree)


def walk(listener, tree):
    """Depth-first walk of a lark tree without recursion."""
    stack = [(tree, False)]
    while stack:
        node, done = stack.pop()
        if done:
            listener.dispatch("exit", node)
            listener.exit_every_rule(node)
            continue

        listener.enter_every_rule(node)
        listener.dispatch("enter", node)
        stack.append((node, True))
        for child in reversed(node.children):
            if isinstance(child, Tree):
                stack.append((child, False))
