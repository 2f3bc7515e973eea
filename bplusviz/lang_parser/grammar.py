# lark grammar for the tree command language
GRAMMAR = '''
        program          : terminated* command?

        ?terminated      : command ";"
        ?command         : insert_cmd | delete_cmd | find_cmd

        // value is optional; the frontend defaults it to the key
        insert_cmd       : "insert"i key value?
        delete_cmd       : "delete"i key
        find_cmd         : "find"i key

        key              : SIGNED_NUMBER
        value            : SIGNED_NUMBER | ESCAPED_STRING | SINGLE_QUOTED_STRING

        SINGLE_QUOTED_STRING : /'[^']*'/

        // ref: https://github.com/lark-parser/lark/blob/master/lark/grammars/common.lark
        %import common.SIGNED_NUMBER
        %import common.ESCAPED_STRING
        %import common.WS
        %ignore WS
'''
