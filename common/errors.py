class ReplicateError(RuntimeError):
    '''Replicate answered with a non-2xx status or a failed prediction.'''

class PredictionOutputError(ValueError):
    '''Prediction finished but its output cannot be used as an image URL.'''

class ImageDownloadError(RuntimeError):
    '''The image URL returned by the model could not be saved locally.'''
