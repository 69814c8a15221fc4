import pandas


class SingleFileParser(object):
    def __init__(self, file_name, target=None, weight_column=None, variables=None):
        """
        Reads a discrete data set from a CSV file.

        :param file_name: path to the .csv file
        :param target: name of the class variable, optional
        :param weight_column: name of a column holding per-row weights; removed from the variables
        :param variables: restrict the data set to these columns (in this order)
        """
        self.file_name = file_name
        self.data_frame = pandas.read_csv(self.file_name)

        self.weights = None
        if weight_column is not None:
            if weight_column not in self.data_frame.columns:
                raise ValueError('Weight column {name!r} not in {file}.'.format(name=weight_column, file=file_name))
            self.weights = self.data_frame.pop(weight_column)

        if variables is not None:
            self.filter(variables)
        self.variables = self.data_frame.columns.values.tolist()

        self.target = target
        if target is not None and target not in self.variables:
            raise ValueError('Target {name!r} not in {file}.'.format(name=target, file=file_name))

    def filter(self, variables):
        variables = list(filter(lambda x: x in self.data_frame.columns, variables))
        self.data_frame = self.data_frame[variables]
        self.variables = self.data_frame.columns.values.tolist()
        return self.data_frame

    @property
    def target_index(self):
        if self.target is None:
            return None
        return self.variables.index(self.target)
