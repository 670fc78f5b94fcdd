import sys


class Logger:
    def __init__(self):
        self.logger_id = "huffman"
        self.verbose = False

    def set_logger_id(self, logger_id):
        self.logger_id = logger_id

    def set_verbose(self, verbose):
        self.verbose = verbose

    def log(self, *args):
        if self.verbose:
            print(f"[{self.logger_id}]", *args)

    def error(self, *args):
        print(f"[ERROR][{self.logger_id}]", *args, file=sys.stderr)

logger = Logger()
